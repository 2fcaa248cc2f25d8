import sys
from pathlib import Path

# Allows running the tests from a checkout without installing
sys.path.insert(0, str(Path(__file__).parent.parent / "src" / "py"))

# EOF
