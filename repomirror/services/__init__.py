"""
Service layer for repomirror.

Contains business logic that orchestrates domain objects and infrastructure:
- RepositoryValidator: URL resolution, visibility policy
- BatchCopyEngine: windowed concurrent blob copy
- MirrorService: the mirror run state machine
- generate_mirror_script: offline full-history mirror script

Services are the primary API for commands to use.
They handle coordination between infrastructure and domain layers.
"""

from .validator import RepositoryValidator
from .batch_copy import BatchCopyEngine
from .mirror_service import MirrorService, MirrorOptions
from .script_service import generate_mirror_script

__all__ = [
    'RepositoryValidator',
    'BatchCopyEngine',
    'MirrorService',
    'MirrorOptions',
    'generate_mirror_script',
]
