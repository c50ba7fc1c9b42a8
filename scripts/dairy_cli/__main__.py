import sys

from scripts.dairy_cli.main import main

sys.exit(main())
