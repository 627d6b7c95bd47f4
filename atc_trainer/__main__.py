import sys

from .run_trainer import main

sys.exit(main())
