"""Allow running as: python -m polylens"""
from dotenv import load_dotenv

load_dotenv()

from polylens.main import cli_main  # noqa: E402

if __name__ == "__main__":
    cli_main()
