from pure_disk.config.models import PureDiskConfig, load_config

__all__ = ["PureDiskConfig", "load_config"]
