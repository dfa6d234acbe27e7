import sys

from wallet_explorer.cli import main


sys.exit(main())
