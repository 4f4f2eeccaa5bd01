import sys

from anagram.__main__ import main

if __name__ == "__main__":
    sys.exit(main())
