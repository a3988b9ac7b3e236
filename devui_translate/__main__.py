import sys

from devui_translate.scripts.translate_devui import main

sys.exit(main())
