import sys

from jira_relay.server import main

sys.exit(main())
