"""Print a freshly generated uid in every supported text form.

Usage: python -m auid
"""

import logging

from auid.config import settings
from auid.uid import Uid

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    uid = Uid.new()
    logger.debug(f"Generated uid at {uid.timestamp.isoformat()}")

    print(f"10: {uid}")
    print(f"16: {uid.to_base16()}")
    print(f"32: {uid.to_base32()}")
    print(f"58: {uid.to_base58()}")
    print(f"64: {uid.to_base64()}")


if __name__ == "__main__":
    main()
