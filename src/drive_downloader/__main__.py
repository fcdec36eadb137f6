import sys

from drive_downloader.cli import main

sys.exit(main())
