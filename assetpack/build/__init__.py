"""Build pipeline module.

This module handles:
- Path resolution for inputs and versioned outputs
- Output graph construction from a manifest
- Output assembly and the named artifact table
- Post-processing actions piped through external executables
- Publishing and temporary artifact cleanup
"""

from assetpack.build.graph import OutputGraph, OutputSpec
from assetpack.build.service import Packer, run_build

__all__ = ["OutputGraph", "OutputSpec", "Packer", "run_build"]
