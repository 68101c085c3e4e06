"""
innotool - Inno Setup build and release orchestration

A Python CLI and library that takes a .NET desktop project from source to a
signed Inno Setup installer, driven by a YAML settings file.

innotool provides:
  - Hierarchical YAML settings with inherited values and options
  - Timestamp-based version stamping of projects and scripts
  - dotnet restore and MSBuild publish per build level
  - Code signing with SignTool (PFX, thumbprint or automatic selection)
  - [Files] section rebuilt from the publish folder
  - Generated [Run] and [Code] content for .NET runtime installation
  - Runtime installer download with caching

Quick Start
-----------
Validate a settings file:

    $ innotool validate --config build.yaml

Run it:

    $ innotool run --config build.yaml

For full CLI documentation:

    $ innotool --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
config : package
    Settings loading and action tree resolution.
script : package
    Line-oriented Inno Setup script editing.
build : package
    External tools and the publish pipeline.
versioning : package
    Version generation and stamping.
policy : package
    Build levels and .NET runtime references.
io : package
    Runtime installer downloads.

Public API
----------
    from innotool.config import load_effective_actions
    from innotool.build import run_actions
    from innotool.script import ScriptDocument, update_script_file
    from innotool.validation import validate_config
"""

__version__ = "0.1.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "innotool - Inno Setup build and release orchestration"

# Re-export commonly used functions for convenience
from innotool.build import run_actions
from innotool.config import load_effective_actions
from innotool.script import ScriptDocument, update_script_file
from innotool.validation import validate_config

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "load_effective_actions",
    "run_actions",
    "ScriptDocument",
    "update_script_file",
    "validate_config",
]
