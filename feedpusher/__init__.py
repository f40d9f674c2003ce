"""feedpusher: publish versioned packages to local and remote feeds.

v0.1.0:
  - Version → channel classification (Release, Preview, CI, Local, Blank)
  - Channel routing to a local sub-feed and remote package indexes
  - Concurrent existence checks with an idempotent per-feed plan
  - "Nothing to publish" gate before the build step
  - Parallel, fail-fast-per-feed pushes with feed credentials
  - Promotion into quality views (CI, Exploratory, Preview, Latest, Stable)
"""

__version__ = "0.1.0"

from feedpusher.core.orchestrator import PublishOrchestrator
from feedpusher.cli.app import app as cli

__all__ = ["PublishOrchestrator", "cli", "__version__"]
