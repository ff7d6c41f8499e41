# pure_disk/__main__.py
from pure_disk.cli import app


def main():
    """
    Main application
    """
    app()


if __name__ == "__main__":
    main()
