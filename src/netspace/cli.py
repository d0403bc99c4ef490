#!/usr/bin/env python3
"""
Netspace CLI: inspect and edit the GSN / GTN registries.

Usage:
    netspace list
    netspace show <springname>
    netspace find --host <host> | --address <ip> | --role <roles> | --state <state>
    netspace register <nodestr>
    netspace register-file <path>
    netspace unregister <springname|nodestr>
    netspace update <springname> <state>
    netspace root-register <nodestr> <geosub>
    netspace root-unregister <springname> <geosub>
    netspace roots <geosub>
    netspace geosubs
    netspace status
    netspace reset                      (testing mode only)

A node description (nodestr) is:
    springname,host,address,service,state,role,key

Examples:
    netspace register "alpha,alpha.example.org,192.168.1.2,1,0,1,"
    netspace find --role hub,org
    netspace --testing reset
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import NetspaceConfig
from .errors import NodeValidationError, StoreError
from .models import NodeRecord, NodeRole, NodeState
from .netspace import Netspace


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(name)s] %(levelname)s: %(message)s' if verbose else '%(message)s'
    )
    # Quiet down noisy loggers
    if not verbose:
        logging.getLogger("fsspec").setLevel(logging.WARNING)
        logging.getLogger("netspace").setLevel(logging.WARNING)


def parse_state(value: str) -> NodeState:
    """Parse a state given by name ("enabled") or number ("2")."""
    if value.isdigit():
        try:
            return NodeState(int(value))
        except ValueError:
            pass
    else:
        try:
            return NodeState[value.upper()]
        except KeyError:
            pass
    raise argparse.ArgumentTypeError(
        f"invalid state '{value}' (choose from {', '.join(s.name.lower() for s in NodeState)})"
    )


def parse_roles(value: str) -> NodeRole:
    """Parse a role mask given as a number ("3") or names ("hub,org")."""
    if value.isdigit():
        return NodeRole(int(value))

    mask = NodeRole.UNKNOWN
    for name in value.split(","):
        try:
            mask |= NodeRole[name.strip().upper()]
        except KeyError:
            raise argparse.ArgumentTypeError(f"invalid role '{name}'") from None
    return mask


def print_nodes(nodes: List[NodeRecord]):
    """Print nodes one description per line."""
    if not nodes:
        print("(no nodes)")
        return
    for node in nodes:
        print(node.to_str())


def fail(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


# =============================================================================
# Commands
# =============================================================================

def cmd_list(netspace: Netspace, args) -> int:
    print_nodes(netspace.gsn.list_all())
    return 0


def cmd_show(netspace: Netspace, args) -> int:
    node = netspace.gsn.find_by_identity(args.springname)
    if node is None:
        return fail(f"node '{args.springname}' not found")
    print(node.to_str())
    return 0


def cmd_find(netspace: Netspace, args) -> int:
    if args.host is not None:
        node = netspace.gsn.find_by_hostname(args.host)
        print_nodes([node] if node else [])
    elif args.address is not None:
        node = netspace.gsn.find_by_address(args.address)
        print_nodes([node] if node else [])
    elif args.role is not None:
        print_nodes(netspace.gsn.find_by_role(args.role))
    else:
        print_nodes(netspace.gsn.find_by_state(args.state))
    return 0


def cmd_register(netspace: Netspace, args) -> int:
    try:
        node = NodeRecord.from_str(args.nodestr)
    except NodeValidationError as e:
        return fail(str(e))

    if not netspace.gsn.register(node):
        return fail(f"node '{node.springname}' or host '{node.host}' already registered")

    print(f"Registered {node.springname}")
    return 0


def cmd_register_file(netspace: Netspace, args) -> int:
    path = Path(args.path)
    if not path.exists():
        return fail(f"file not found: {path}")

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        return fail(f"cannot read {path}: {e}")

    results, errors = netspace.gsn.register_many(lines)

    if errors:
        for error in errors:
            print(f"  {error}", file=sys.stderr)
        return fail("no nodes registered")

    for springname, registered in results:
        print(f"  {'registered' if registered else 'rejected  '} {springname}")

    rejected = [name for name, ok in results if not ok]
    print(f"\n{len(results) - len(rejected)}/{len(results)} nodes registered")
    return 1 if rejected else 0


def cmd_unregister(netspace: Netspace, args) -> int:
    if "," in args.node:
        try:
            node = NodeRecord.from_str(args.node)
        except NodeValidationError as e:
            return fail(str(e))
    else:
        node = netspace.gsn.find_by_identity(args.node)
        if node is None:
            return fail(f"node '{args.node}' not found")

    if not netspace.gsn.unregister(node):
        return fail(f"node '{node.springname}' could not be unregistered")

    print(f"Unregistered {node.springname}")
    return 0


def cmd_update(netspace: Netspace, args) -> int:
    node = netspace.gsn.find_by_identity(args.springname)
    if node is None:
        return fail(f"node '{args.springname}' not found")

    if not netspace.gsn.update(node.model_copy(update={"state": args.state})):
        return fail(f"node '{args.springname}' could not be updated")

    print(f"{args.springname}: {node.state.name.lower()} -> {args.state.name.lower()}")
    return 0


def cmd_root_register(netspace: Netspace, args) -> int:
    try:
        node = NodeRecord.from_str(args.nodestr)
    except NodeValidationError as e:
        return fail(str(e))

    if not netspace.gtn.register_root(node, args.geosub):
        return fail(f"'{node.springname}' could not be registered as root of '{args.geosub}'")

    print(f"Registered {node.springname} as root of {args.geosub}")
    return 0


def cmd_root_unregister(netspace: Netspace, args) -> int:
    node = netspace.gtn.root_by_identity(args.springname, args.geosub)
    if node is None or not netspace.gtn.unregister_root(node, args.geosub):
        return fail(f"'{args.springname}' is not a root of '{args.geosub}'")

    print(f"Unregistered {args.springname} as root of {args.geosub}")
    return 0


def cmd_roots(netspace: Netspace, args) -> int:
    print_nodes(netspace.gtn.roots_of(args.geosub))
    return 0


def cmd_geosubs(netspace: Netspace, args) -> int:
    names = netspace.gtn.geosubs()
    if not names:
        print("(no geosubs)")
    for name in names:
        print(name)
    return 0


def cmd_status(netspace: Netspace, args) -> int:
    stats = netspace.get_stats()

    print("\nNetspace Status:")
    print("=" * 50)
    print(f"  Store: {stats['backend']} ({stats['store_dir']})")
    print(f"  Mode: {'testing' if stats['testing'] else 'live'}")
    print(f"  GSN nodes: {stats['total_nodes']} total")
    for state, count in sorted(stats["nodes_by_state"].items()):
        print(f"    - {state.lower()}: {count}")
    print(f"  GTN roots: {stats['root_registrations']}")
    print(f"  Geosubs: {', '.join(stats['geosubs']) or '(none)'}")
    return 0


def cmd_reset(netspace: Netspace, args) -> int:
    if not netspace.reset_for_testing():
        return fail("reset is only available in testing mode (use --testing)")
    print("Netspace reset")
    return 0


# =============================================================================
# Entry point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netspace",
        description="Netspace CLI - manage the GSN and GTN node registries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s register "alpha,alpha.example.org,192.168.1.2,1,0,1,"
  %(prog)s update alpha enabled
  %(prog)s find --role hub
  %(prog)s root-register "alpha,alpha.example.org,192.168.1.2,1,0,1," esusx
  %(prog)s status
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--config", "-c", help="Path to netspace.yaml")
    parser.add_argument("--testing", action="store_true", default=None,
                        help="Use the test stores and enable testing operations")
    parser.add_argument("--memory", action="store_true",
                        help="Use in-memory stores (nothing is persisted)")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("list", help="List every GSN node")

    show_parser = subparsers.add_parser("show", help="Show a GSN node")
    show_parser.add_argument("springname")

    find_parser = subparsers.add_parser("find", help="Find GSN nodes")
    criteria = find_parser.add_mutually_exclusive_group(required=True)
    criteria.add_argument("--host", help="Hostname")
    criteria.add_argument("--address", help="IP address")
    criteria.add_argument("--role", type=parse_roles, help="Role mask (number or hub,org)")
    criteria.add_argument("--state", type=parse_state, help="State (name or number)")

    register_parser = subparsers.add_parser("register", help="Register a GSN node")
    register_parser.add_argument("nodestr", help="Node description")

    file_parser = subparsers.add_parser("register-file", help="Register node descriptions from a file")
    file_parser.add_argument("path", help="File with one node description per line")

    unregister_parser = subparsers.add_parser("unregister", help="Unregister a GSN node")
    unregister_parser.add_argument("node", help="Springname or node description")

    update_parser = subparsers.add_parser("update", help="Set the state of a GSN node")
    update_parser.add_argument("springname")
    update_parser.add_argument("state", type=parse_state)

    root_register_parser = subparsers.add_parser("root-register", help="Register a GTN root")
    root_register_parser.add_argument("nodestr", help="Node description")
    root_register_parser.add_argument("geosub", help="GSN name")

    root_unregister_parser = subparsers.add_parser("root-unregister", help="Unregister a GTN root")
    root_unregister_parser.add_argument("springname")
    root_unregister_parser.add_argument("geosub", help="GSN name")

    roots_parser = subparsers.add_parser("roots", help="List the roots of a GSN")
    roots_parser.add_argument("geosub", help="GSN name")

    subparsers.add_parser("geosubs", help="List GSNs with registered roots")
    subparsers.add_parser("status", help="Show netspace status")
    subparsers.add_parser("reset", help="Clear both registries (testing mode only)")

    return parser


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "find": cmd_find,
    "register": cmd_register,
    "register-file": cmd_register_file,
    "unregister": cmd_unregister,
    "update": cmd_update,
    "root-register": cmd_root_register,
    "root-unregister": cmd_root_unregister,
    "roots": cmd_roots,
    "geosubs": cmd_geosubs,
    "status": cmd_status,
    "reset": cmd_reset,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = NetspaceConfig.load(args.config).with_overrides(
            testing=args.testing,
            backend="memory" if args.memory else None,
        )
    except ValueError as e:
        return fail(f"invalid configuration: {e}")

    try:
        netspace = Netspace(config)
        return COMMANDS[args.command](netspace, args)
    except StoreError as e:
        return fail(f"store failure: {e}")


if __name__ == "__main__":
    sys.exit(main())
