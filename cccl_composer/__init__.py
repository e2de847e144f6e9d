"""
cccl_composer — combinatorial build sweep for the CUB / Thrust trees.

Every (build type × CTK × compiler × C++ dialect) cell is configured and
built in its own out-of-tree directory, concurrently, and the outcome is
reported as a nested pass/fail matrix.
"""

__version__ = "0.1.0"
PACKAGE_NAME = "cccl-composer"
SCHEMA_VERSION = "0.1"
