"""
Root conftest - makes the repository packages importable when running
pytest from the repository root.
"""
import sys
from pathlib import Path

# 'dense_image_config', 'dense_image_utils' and 'src_dense_image' are imported as top-level packages
_root = Path(__file__).resolve().parent
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))
