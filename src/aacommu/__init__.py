"""AACommu - assisted sentence composition for live conversations.

AACommu helps a non-speaking user answer a conversation partner:
- Partner speech is recorded and transcribed by a remote service
- The reply is built token by token from suggested candidates
- A local fallback engine keeps suggestions flowing when offline
- The finished sentence is spoken aloud and logged

Usage:
    python -m aacommu --profile dev
    python -m aacommu --mock-gateway --mock-audio
"""

__version__ = "0.1.0"

from .config import AACConfig
from .config.loader import load_config

__all__ = [
    "AACConfig",
    "__version__",
    "load_config",
]
