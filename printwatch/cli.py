#!/usr/bin/env python3
"""
printwatch - Command Line Interface.

Usage:
    # Sweep a range for printers
    python -m printwatch discover 192.168.1.0/24 --community public

    # Is this one host a printer?
    python -m printwatch probe 192.168.1.50

    # Read counters, toner and identity
    python -m printwatch poll 192.168.1.50 -o poll.json

    # Build a counter mapping from the device's MIBs, then poll with it
    python -m printwatch crawl-oids 192.168.1.50 -o mapping.json
    python -m printwatch poll 192.168.1.50 --mapping mapping.json

    # Raw subtree walk
    python -m printwatch walk 192.168.1.50 1.3.6.1.2.1.43.10 --max-results 50

    # Offline Ricoh classification
    python -m printwatch identify --sys-descr "RICOH IM C3000 1.02"
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from .config import PrintwatchConfig
from .counters import default_counter_oids, format_oid_list, parse_oid_list
from .discovery import (
    FALLBACK_DISCOVERY_CIDR,
    DiscoveryEngine,
    default_discovery_cidr,
    probe_printer,
)
from .errors import PrintwatchError, StorageAction, StorageError
from .events import ConsoleEventPrinter, EventEmitter
from .models import CounterOidSet, PrinterRecord
from .poller import crawl_counter_oids, poll_printer
from .profiler import identify_device
from .snmp.client import SnmpV2cClient
from .snmp.messages import SnmpAddress, SnmpWalkRequest
from .snmp.oid import Oid

log = logging.getLogger("printwatch.cli")


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    """Options shared by every command. None means "use the config file"."""
    parser.add_argument(
        '--config',
        type=Path,
        help='YAML configuration file'
    )
    parser.add_argument(
        '-c', '--community',
        help='SNMP community string (default: public)'
    )
    parser.add_argument(
        '-t', '--timeout',
        type=float,
        help='SNMP timeout in seconds per attempt (default: 2)'
    )
    parser.add_argument(
        '-r', '--retries',
        type=int,
        help='SNMP retries after the first attempt (default: 1)'
    )
    parser.add_argument(
        '-p', '--port',
        type=int,
        help='SNMP port (default: 161)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output and debug logging'
    )
    parser.add_argument(
        '-o', '--output',
        type=Path,
        help='Write JSON results to this file'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='printwatch',
        description='SNMP printer discovery and counter polling',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  printwatch discover 10.1.20.0/24 -c public
  printwatch poll 10.1.20.15 -o poll.json
  printwatch crawl-oids 10.1.20.15 -o mapping.json
  printwatch identify --sys-object-id 1.3.6.1.4.1.367.1.1 --sys-descr "RICOH MP 305+"
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # discover
    discover_parser = subparsers.add_parser(
        'discover',
        help='Sweep a CIDR range for printers'
    )
    discover_parser.add_argument(
        'cidr',
        nargs='?',
        help='Range to sweep, e.g. 192.168.1.0/24 (default: local /24)'
    )
    discover_parser.add_argument(
        '--concurrency',
        type=int,
        help='Maximum probes in flight (default: 24)'
    )
    discover_parser.add_argument(
        '--timestamps',
        action='store_true',
        help='Show timestamps in output'
    )
    discover_parser.add_argument(
        '--no-color',
        action='store_true',
        dest='no_color',
        help='Disable colored output'
    )
    _add_common_args(discover_parser)

    # probe
    probe_parser = subparsers.add_parser(
        'probe',
        help='Check whether a single host is a printer'
    )
    probe_parser.add_argument('host', help='IP address or hostname')
    _add_common_args(probe_parser)

    # poll
    poll_parser = subparsers.add_parser(
        'poll',
        help='Poll counters, toner and identity from a printer'
    )
    poll_parser.add_argument('host', help='IP address or hostname')
    poll_parser.add_argument(
        '--mapping',
        type=Path,
        help='Counter mapping JSON (as written by crawl-oids -o)'
    )
    poll_parser.add_argument('--bw', help='B/W counter OIDs, comma or space separated')
    poll_parser.add_argument('--color', help='Color counter OIDs')
    poll_parser.add_argument('--total', help='Total counter OIDs')
    _add_common_args(poll_parser)

    # walk
    walk_parser = subparsers.add_parser(
        'walk',
        help='Walk an SNMP subtree'
    )
    walk_parser.add_argument('host', help='IP address or hostname')
    walk_parser.add_argument('root', help='Root OID, e.g. 1.3.6.1.2.1.43')
    walk_parser.add_argument(
        '--max-results',
        type=int,
        default=0,
        dest='max_results',
        help='Stop after this many varbinds (default: 0, unbounded)'
    )
    _add_common_args(walk_parser)

    # crawl-oids
    crawl_parser = subparsers.add_parser(
        'crawl-oids',
        help='Build a counter mapping by walking printer and Ricoh MIBs'
    )
    crawl_parser.add_argument('host', help='IP address or hostname')
    _add_common_args(crawl_parser)

    # identify
    identify_parser = subparsers.add_parser(
        'identify',
        help='Classify a device from sysObjectID / sysDescr (no network)'
    )
    identify_parser.add_argument('--sys-object-id', dest='sys_object_id')
    identify_parser.add_argument('--sys-descr', dest='sys_descr')
    _add_common_args(identify_parser)

    return parser


def build_config(args) -> PrintwatchConfig:
    """Config file values, overridden by any flags given."""
    config_path = getattr(args, 'config', None)
    config = PrintwatchConfig.from_yaml(config_path) if config_path else PrintwatchConfig()

    if getattr(args, 'community', None):
        config.snmp.community = args.community
    if getattr(args, 'timeout', None) is not None:
        config.snmp.timeout = args.timeout
    if getattr(args, 'retries', None) is not None:
        config.snmp.retries = args.retries
    if getattr(args, 'port', None) is not None:
        config.snmp.port = args.port
    if getattr(args, 'concurrency', None) is not None:
        config.discovery.concurrency = args.concurrency

    return config


def write_output(path: Optional[Path], data: Any) -> None:
    if not path:
        return
    try:
        with open(path, 'w') as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        raise StorageError(StorageAction.SAVE, str(path), str(e)) from e
    print(f"\nSaved to: {path}")


def load_mapping(path: Path) -> CounterOidSet:
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise StorageError(StorageAction.LOAD, str(path), str(e)) from e
    if not isinstance(data, dict):
        raise StorageError(StorageAction.LOAD, str(path), "top level must be an object")
    return CounterOidSet.from_dict(data)


def counter_oids_from_args(args) -> CounterOidSet:
    """--mapping file first, then --bw/--color/--total replace categories."""
    mapping = load_mapping(args.mapping) if args.mapping else default_counter_oids()
    if args.bw is not None:
        mapping.bw = parse_oid_list(args.bw)
    if args.color is not None:
        mapping.color = parse_oid_list(args.color)
    if args.total is not None:
        mapping.total = parse_oid_list(args.total)
    return mapping


def _print_header(title: str) -> None:
    print(f"{'=' * 60}")
    print(title)
    print(f"{'=' * 60}")


def _fmt(value: Optional[Any]) -> str:
    return 'N/A' if value is None else str(value)


# =============================================================================
# Commands
# =============================================================================

async def cmd_discover(args, config: PrintwatchConfig) -> int:
    """Sweep a range with event-driven console output."""
    cidr = args.cidr or config.discovery.cidr or default_discovery_cidr() or FALLBACK_DISCOVERY_CIDR

    emitter = EventEmitter()
    console = ConsoleEventPrinter(
        verbose=args.verbose,
        color=not args.no_color,
        show_timestamps=args.timestamps,
    )
    emitter.subscribe(console.handle_event)

    engine = DiscoveryEngine(
        config.snmp,
        concurrency=config.discovery.concurrency,
        events=emitter,
    )

    try:
        result = await engine.run(cidr, community=args.community)
    except asyncio.CancelledError:
        engine.stop()
        raise

    if result.printers:
        print(f"{'Host':<18} {'Model'}")
        for record in result.printers:
            print(f"{record.host or '':<18} {record.model or 'unknown model'}")

    write_output(args.output, result.to_dict())

    error = result.as_error()
    if error is not None:
        print(f"ERROR: {error.user_summary()}")
        if args.verbose:
            print(error.technical_detail())
        return 1
    return 0


async def cmd_probe(args, config: PrintwatchConfig) -> int:
    """Probe one host."""
    address = SnmpAddress(args.host, config.snmp.port)
    record = await probe_printer(address, args.community, config=config.snmp)

    if record is None:
        print(f"{address}: not a printer")
        return 1

    _print_header(f"PRINTER: {record.host}")
    print(f"ID:            {record.printer_id}")
    print(f"Model:         {_fmt(record.model)}")
    print(f"sysObjectID:   {_fmt(record.sys_object_id)}")
    print(f"Status:        {record.status.value}")

    write_output(args.output, record.to_dict())
    return 0


async def cmd_poll(args, config: PrintwatchConfig) -> int:
    """Poll one printer and print counters, usage and toner."""
    counter_oids = counter_oids_from_args(args)
    record = PrinterRecord(
        printer_id=f"manual-{args.host}",
        host=args.host,
        snmp_address=SnmpAddress(args.host, config.snmp.port),
        community=args.community,
    )

    result = await poll_printer(record, counter_oids, client=SnmpV2cClient(config.snmp))
    snapshot = result.resolution.snapshot

    _print_header(f"POLL: {result.display_name or args.host}")
    print(f"sysDescr:      {_fmt(result.sys_descr)}")
    print(f"sysObjectID:   {_fmt(result.sys_object_id)}")
    print(f"Profile:       {result.profile.match_status.value} ({result.profile.strategy.value})")
    print(f"Counter mode:  {result.resolution.mode.value}")
    print(f"B/W clicks:    {_fmt(snapshot.bw)}")
    print(f"Color clicks:  {_fmt(snapshot.color)}")
    print(f"Total clicks:  {_fmt(snapshot.total)}")

    if result.profile.is_ricoh:
        usage = result.usage
        print("\nCopier / printer counts:")
        print(f"  B/W copier:    {_fmt(usage.bw_copier)}")
        print(f"  B/W printer:   {_fmt(usage.bw_printer)}")
        print(f"  Color copier:  {_fmt(usage.color_copier)}")
        print(f"  Color printer: {_fmt(usage.color_printer)}")
        toner = result.toner
        print("\nToner levels:")
        print(f"  Black:   {_fmt(toner.black)}")
        print(f"  Cyan:    {_fmt(toner.cyan)}")
        print(f"  Magenta: {_fmt(toner.magenta)}")
        print(f"  Yellow:  {_fmt(toner.yellow)}")

    if result.resolution.warnings:
        print("\nWarnings:")
        for warning in result.resolution.warnings:
            print(f"  - {warning}")

    write_output(args.output, result.to_dict())
    return 0


async def cmd_walk(args, config: PrintwatchConfig) -> int:
    """Walk a subtree and print each varbind."""
    client = SnmpV2cClient(config.snmp)
    request = SnmpWalkRequest(
        SnmpAddress(args.host, config.snmp.port),
        Oid.parse(args.root),
        args.community,
        max_results=args.max_results,
    )
    response = await client.walk(request)

    for varbind in response.varbinds:
        print(f"{varbind.oid} = {varbind.value.kind.value}: {varbind.value}")
    print(f"\n{len(response.varbinds)} varbinds")

    write_output(args.output, response.to_dict())
    return 0


async def cmd_crawl_oids(args, config: PrintwatchConfig) -> int:
    """Derive a counter mapping from the printer's MIBs."""
    address = SnmpAddress(args.host, config.snmp.port)
    mapping = await crawl_counter_oids(address, args.community, client=SnmpV2cClient(config.snmp))

    _print_header(f"COUNTER MAPPING: {address}")
    print(f"B/W:    {format_oid_list(mapping.bw) or '-'}")
    print(f"Color:  {format_oid_list(mapping.color) or '-'}")
    print(f"Total:  {format_oid_list(mapping.total) or '-'}")

    write_output(args.output, mapping.to_dict())
    return 0


def cmd_identify(args) -> int:
    """Classify offline from the given identity strings."""
    profile = identify_device(args.sys_object_id, args.sys_descr)

    _print_header("DEVICE PROFILE")
    print(f"Match:      {profile.match_status.value}")
    print(f"Model:      {_fmt(profile.model)}")
    print(f"Strategy:   {profile.strategy.value}")
    print(f"Counters:   bw={profile.counters.bw} color={profile.counters.color} "
          f"total={profile.counters.total}")
    for note in profile.notes:
        print(f"  - {note}")

    write_output(args.output, profile.to_dict())
    return 0


COMMANDS = {
    'discover': cmd_discover,
    'probe': cmd_probe,
    'poll': cmd_poll,
    'walk': cmd_walk,
    'crawl-oids': cmd_crawl_oids,
}


def run_command(args) -> int:
    """Dispatch a parsed command; PrintwatchErrors become exit status 1."""
    try:
        if args.command == 'identify':
            return cmd_identify(args)
        config = build_config(args)
        return asyncio.run(COMMANDS[args.command](args, config))
    except PrintwatchError as e:
        log.debug(f"{args.command} failed: {e.technical_detail()}")
        print(f"ERROR: {e.user_summary()}")
        if args.verbose:
            print(e.technical_detail())
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)
    return run_command(args)


if __name__ == '__main__':
    sys.exit(main())
