'''
Channel Hub Test Suite

Test Modules:
-------------
- test_similarity.py: Levenshtein distance and similarity ratio
  - Known distances, symmetry, empty strings

- test_overlap_validation.py: Overlap validator rules
  - exact/exact, exact/contains, contains/contains per strategy
  - Overlap scoring and level thresholds
  - Aggregation: worst severity, de-duplication, message joining
  - Parent scoping, self-exclusion, purity, invalid arguments

- test_sub_channel_directory.py: Directory reads and gated writes
  - Create/update refused on error, warning refused without override
  - Update re-validates only when a UTM field changes

- test_api.py: Endpoint contracts
  - POST /validate-subchannel-overlap 400/500/200
  - /sub-channels CRUD including 404 and 409

Running Tests:
--------------
    pip install -e ".[test]"
    pytest channel_hub/tests -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
