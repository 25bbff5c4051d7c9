"""Allow ``python -m tileworld``."""

from .cli import main

if __name__ == "__main__":
    main()
