import sys

from datdns.cli import main

if __name__ == "__main__":
    sys.exit(main())
