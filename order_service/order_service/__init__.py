"""Order service: places orders after an inventory check and announces them on Kafka."""

__version__ = "0.1.0"
