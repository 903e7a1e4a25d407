#!/usr/bin/env python3
"""
On-demand EC2 GitHub Actions Runner

Provisions ephemeral EC2 instances as self-hosted runners for a workflow:
- Registration token request before launch
- Wait for the new runner to report online, with quiet period and timeout
- Idempotent runner removal by name
- Instance termination on teardown

Usage:
    python3 runner_manager.py start     # Launch instance(s), wait for runner
    python3 runner_manager.py stop      # Remove runner(s), terminate instance(s)
"""

import sys

from ec2_runner.cli import main


if __name__ == '__main__':
    sys.exit(main())
