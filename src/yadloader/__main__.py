"""Allow running as `python -m yadloader`."""

from yadloader.client.cli import main

if __name__ == "__main__":
    main()
