from rich import print
from rich.pretty import pprint

from commandtree import *

__prog__ = "example"


def serve(context):
    if context.executed:
        print("serving on port", context.value("port"))


def echo(context):
    print(*context.arguments)


parser = Parser("example", shell=True, fancy=True, colorful=True)
parser.add_command("", "global options").add_param("verbose", "v", "Verbose output.")
parser.add_command("serve", "Start the server.", serve) \
    .add_param("port", "p", "Listen port.", True, Integer()) \
    .add_param("timeout", "t", "Idle timeout.", False, Duration())
parser.add_raw_command("echo", "Print the arguments.", echo)


if __name__ == '__main__':
    pprint(parser.get_command("serve"))
    print(parser)
    invoke(parser)
