"""
Outputs Module

Publishes values for later workflow steps.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional


class ActionOutputs:
    """Write step outputs to the file named by GITHUB_OUTPUT, or stdout"""

    def __init__(self, output_file: Optional[Path] = None, logger: Optional[logging.Logger] = None):
        if output_file is None and os.getenv('GITHUB_OUTPUT'):
            output_file = Path(os.environ['GITHUB_OUTPUT'])
        self.output_file = output_file
        self.logger = logger or logging.getLogger(__name__)
        self.values: Dict[str, str] = {}

    def set_output(self, name: str, value: str):
        self.values[name] = value
        if self.output_file:
            with open(self.output_file, 'a') as f:
                f.write(f"{name}={value}\n")
        else:
            print(f"{name}={value}")
        self.logger.debug(f"Output {name}={value}")


def set_failed(message: str):
    """Report a failed step in the workflow log"""
    print(f"::error::{message}", file=sys.stderr)
