import sys

from sales_snapshot.cli import main

sys.exit(main())
