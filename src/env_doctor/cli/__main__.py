"""
Allow running the CLI as a module: python -m env_doctor.cli
"""

import sys
from .doctor import main

if __name__ == "__main__":
    sys.exit(main())
