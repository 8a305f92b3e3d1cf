import sys

from dropbox_content_hash.cli import main

sys.exit(main())
