"""Allow ``python -m ontogen`` as an alias of ``ontogen-vhdl``."""

import sys

from ontogen.cli.gen_vhdl_entity import main

sys.exit(main())
