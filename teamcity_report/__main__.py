import sys

from teamcity_report.main import main

sys.exit(main())
