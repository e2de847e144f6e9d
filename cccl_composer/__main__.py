import sys

from cccl_composer.cli import main

sys.exit(main())
