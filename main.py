from rich.pretty import pprint

from argot import *


def parent(schema):
    schema.flag("device", "d", type="string", descr="which device to start the system on")
    schema.positional("command", choices=("start", "stop"), halt=True)


def start(schema):
    schema.flag("power", "p", type="integer", descr="with how much power to start the system")
    schema.positional("system", descr="the system to start")


def stop(schema):
    schema.flag("force", "f", descr="force stopping of the system")
    schema.positional("system", descr="the system to stop")


if __name__ == '__main__':
    __prog__ = "systemctl"

    args = Parser(__prog__, version="0.1").parse(parent).unwrap()
    subcommand = {"start": start, "stop": stop}[args.command]
    subargs = Parser(f"{__prog__} {args.command}").parse(subcommand, args.remaining).unwrap()
    pprint({"device": args.device, **subargs})
