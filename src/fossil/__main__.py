"""Allow ``python -m fossil``."""

from fossil.cli import main

if __name__ == "__main__":
    main()
