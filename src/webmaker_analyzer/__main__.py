import sys

from .cli.analyze import main

if __name__ == "__main__":
    sys.exit(main())
