"""Package entry point for ``python -m base64_indexer``.

WHY: Users run the indexer as ``python -m base64_indexer --glob ...``
without installing the console script.

HOW: Delegates to the CLI's main() function.
"""

import sys

from base64_indexer.cli import main

if __name__ == "__main__":
    sys.exit(main())
