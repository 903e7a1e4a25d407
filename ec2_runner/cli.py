#!/usr/bin/env python3
"""
CLI Module

Command-line interface for on-demand EC2 self-hosted runners.
"""

import argparse
import sys

from .config import RunnerConfig
from .errors import ConfigurationError, RunnerProvisionerError
from .github_api import GitHubAPI
from .manager import RunnerManager
from .outputs import set_failed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='On-demand EC2 instances as GitHub Actions self-hosted runners',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Launch one instance and wait until its runner is online
  python3 runner_manager.py start

  # Launch two instances, allow 10 minutes for registration
  python3 runner_manager.py start --count 2 --max-timeout-ms 600000

  # Remove the runners and terminate the instances
  python3 runner_manager.py stop --label AWS-123 --instance-id i-0abc,i-0def --spawned-count 2

  # Mode can also come from the environment
  RUNNER_MODE=stop python3 runner_manager.py
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Mode to execute')

    start_parser = subparsers.add_parser('start', help='Launch EC2 instance(s) and register runner(s)')
    start_parser.add_argument('--count', type=int, help='Number of instances to launch')
    start_parser.add_argument('--timeout-ms', type=int, help='Quiet period before the first registration check')
    start_parser.add_argument('--max-timeout-ms', type=int, help='Maximum wait for the runner to come online')

    stop_parser = subparsers.add_parser('stop', help='Remove runner(s) and terminate EC2 instance(s)')
    stop_parser.add_argument('--label', help='Label returned by the start mode')
    stop_parser.add_argument('--instance-id', help='Instance ids returned by the start mode (comma-separated)')
    stop_parser.add_argument('--spawned-count', type=int, help='Number of instances launched by the start mode')

    return parser


def apply_overrides(config: RunnerConfig, args: argparse.Namespace):
    """Override environment configuration with CLI arguments"""
    if args.command:
        config.mode = args.command
    if getattr(args, 'count', None) is not None:
        config.count = args.count
    if getattr(args, 'timeout_ms', None) is not None:
        config.timeout_ms = args.timeout_ms
    if getattr(args, 'max_timeout_ms', None) is not None:
        config.max_timeout_ms = args.max_timeout_ms
    if getattr(args, 'label', None):
        config.label = args.label
    if getattr(args, 'instance_id', None):
        config.ec2_instance_ids = [i.strip() for i in args.instance_id.split(',') if i.strip()]
    if getattr(args, 'spawned_count', None) is not None:
        config.spawned_count = args.spawned_count


def main(argv=None):
    """Main entry point for CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load configuration
    try:
        config = RunnerConfig()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        set_failed(str(e))
        return 1

    apply_overrides(config, args)

    # Validate configuration
    errors = config.validate()
    if errors:
        print("Configuration errors:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        set_failed(errors[0])
        return 1

    github_api = GitHubAPI(config)  # Logger will be set by manager
    manager = RunnerManager(config, github_api)
    manager.install_signal_handlers()

    try:
        if config.mode == 'start':
            manager.start()
        else:
            manager.stop()
        return 0
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    except RunnerProvisionerError as e:
        manager.logger.error(str(e))
        set_failed(str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
