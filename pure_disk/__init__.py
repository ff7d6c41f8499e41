"""pure-disk: interactive disk partitioning and mounting for fresh Linux installs."""

__version__ = "0.1.0"
