"""Command-line access to the oracle: prints a signed receipt, or the schedule, as JSON."""

import argparse
import json
import sys
from typing import List, Optional

from src.oracle.errors import CalendarConfigError
from src.utils.config.parameters import ParameterLoader
from src.utils.io.logger import Logger


# pylint: disable=too-few-public-methods
class StatusCli:
    """Entry point wrapping :class:`src.oracle.api.oracle_service.OracleService`."""

    @staticmethod
    def run(argv: Optional[List[str]] = None) -> int:
        """Print the requested response body and return a process exit code."""
        parser = argparse.ArgumentParser(description="Query the market-status oracle.")
        parser.add_argument("mic", nargs="?", default=None, help="Market Identifier Code")
        group = parser.add_mutually_exclusive_group()
        group.add_argument("--schedule", action="store_true", help="next open/close")
        group.add_argument("--exchanges", action="store_true", help="supported markets")
        group.add_argument("--keys", action="store_true", help="published keys")
        group.add_argument("--health", action="store_true", help="liveness receipt")
        args = parser.parse_args(argv)

        params = ParameterLoader()
        try:
            service = params.oracle_service()
        except CalendarConfigError as error:
            Logger.error(f"Cannot start oracle: {error}")
            return 2
        mic = args.mic or params.get("default_mic")
        if args.schedule:
            response = service.schedule(mic)
        elif args.exchanges:
            response = service.exchanges()
        elif args.keys:
            response = service.keys()
        elif args.health:
            response = service.health()
        else:
            response = service.demo(mic)
        print(json.dumps(response.body, indent=2, ensure_ascii=False))
        return 0 if response.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(StatusCli.run())
