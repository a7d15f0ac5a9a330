from __future__ import annotations

import argparse
import socket
import sys
from typing import List, Tuple

from .knocker import run
from .logger import create_logger
from .models import DEFAULT_DELAY_MS, DEFAULT_TIMEOUT_MS, KnockConfig
from .ports import atoi, parse_port

USAGE = "toctoc [-u] [-4] [-6] [-t timeout_ms] [-d delay_ms] [-c check_port] hostname port1 [port2] ... [portN]"
VALUE_FLAGS = "tdc"


def build_parser() -> argparse.ArgumentParser:
    # -h/-? only print usage, they don't stop the run
    p = argparse.ArgumentParser(prog="toctoc", usage=USAGE, add_help=False, description="Port knocking client")
    p.add_argument("-4", dest="family", action="store_const", const=socket.AF_INET,
                   default=socket.AF_UNSPEC, help="IPv4 only")
    p.add_argument("-6", dest="family", action="store_const", const=socket.AF_INET6, help="IPv6 only")
    p.add_argument("-u", dest="socktype", action="store_const", const=socket.SOCK_DGRAM,
                   default=socket.SOCK_STREAM, help="Knock with UDP instead of TCP")
    p.add_argument("-t", dest="timeout_ms", type=atoi, default=DEFAULT_TIMEOUT_MS, metavar="timeout_ms",
                   help=f"Per-knock connect timeout in ms (default: {DEFAULT_TIMEOUT_MS})")
    p.add_argument("-d", dest="delay_ms", type=atoi, default=DEFAULT_DELAY_MS, metavar="delay_ms",
                   help=f"Delay between knocks in ms (default: {DEFAULT_DELAY_MS})")
    p.add_argument("-c", dest="check_port", type=parse_port, default=None, metavar="check_port",
                   help="TCP port to test on each address after knocking")
    p.add_argument("-h", "-?", dest="help", action="count", default=0, help="Print usage")
    return p


def expand_args(argv: List[str]) -> Tuple[List[str], List[str]]:
    """
    getopt-style pass before argparse sees the arguments:
    - "-u4" clusters become "-u", "-4", so an unknown letter in a cluster
      doesn't hide the known ones
    - the value of -t/-d/-c is glued to its flag ("-t", "-5" -> "-t-5"),
      otherwise argparse would read "-5" as a flag
    Returns (arguments for argparse, positionals after "--").
    """
    out: List[str] = []
    i = 0
    while i < len(argv):
        arg = argv[i]
        i += 1
        if arg == "--":
            return out, list(argv[i:])
        if not arg.startswith("-") or arg == "-" or arg.startswith("--"):
            out.append(arg)
            continue

        chars = arg[1:]
        for pos, ch in enumerate(chars):
            if ch not in VALUE_FLAGS:
                out.append(f"-{ch}")
                continue
            value = chars[pos + 1:]
            if value:
                out.append(f"-{ch}{value}")
            elif i < len(argv):
                out.extend([f"-{ch}", argv[i]] if argv[i] == "" else [f"-{ch}{argv[i]}"])
                i += 1
            else:
                # missing value, argparse reports it
                out.append(f"-{ch}")
            break
    return out, []


def split_extras(extras: List[str]) -> Tuple[List[str], List[str]]:
    """
    Splits what argparse didn't recognise into (unknown flags, positionals).
    """
    flags: List[str] = []
    positionals: List[str] = []
    for arg in extras:
        if arg.startswith("-") and arg != "-":
            flags.append(arg)
        else:
            positionals.append(arg)
    return flags, positionals


def main(argv=None) -> int:
    logger = create_logger()
    parser = build_parser()
    if argv is None:
        argv = sys.argv[1:]
    option_args, trailing = expand_args(list(argv))
    args, extras = parser.parse_known_args(option_args)
    unknown, positionals = split_extras(extras)
    positionals.extend(trailing)

    for _ in range(args.help + len(unknown)):
        parser.print_usage()

    if len(positionals) < 2:
        logger.error("Missing hostname and/or port(s)")
        parser.print_usage()
        return 1

    config = KnockConfig(
        family=args.family,
        socktype=args.socktype,
        timeout_ms=args.timeout_ms,
        delay_ms=args.delay_ms,
        check_port=args.check_port,
    )
    return run(positionals[0], positionals[1:], config)
