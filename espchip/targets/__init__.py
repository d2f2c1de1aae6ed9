from ..util import FatalError, strip_chip_name
from .esp32 import ESP32
from .esp32c3 import ESP32C3
from .esp32s2 import ESP32S2
from .esp32s3 import ESP32S3
from .esp8266 import ESP8266


CHIP_DEFS = {
    "esp8266": ESP8266,
    "esp32": ESP32,
    "esp32s2": ESP32S2,
    "esp32s3": ESP32S3,
    "esp32c3": ESP32C3,
}

CHIP_LIST = list(CHIP_DEFS.keys())


def get_chip_variant(chip_name):
    """Return the descriptor for a chip name like `esp32s2` or `ESP32-S2`"""
    try:
        return CHIP_DEFS[strip_chip_name(chip_name)]()
    except KeyError:
        raise FatalError(
            f"Unknown chip type '{chip_name}'. "
            f"Supported chips: {', '.join(CHIP_LIST)}"
        )
