from rich.pretty import pprint

from helmsman import *
from helmsman.color import green, red

app = App(
    "greeter",
    version="0.1.0",
    author="Helmsman contributors",
    descr="say hello, optionally more than once",
    flags=[Flag("debug", FlagType.BOOL, "d", descr="dump the command tree")],
)


@app.handler
def main(context):
    if context.bool_flag("debug"):
        pprint(app)
        return
    context.help()


@app.command("hello", "h", flags=[
    Flag("bye", FlagType.BOOL, "b", descr="say goodbye instead"),
    Flag("times", FlagType.INT, "t", descr="number of greetings"),
])
def hello(context):
    """Greet everyone named on the command line."""
    try:
        times = context.int_flag("times")
    except FlagNotFoundError:
        times = 1
    except FlagError as fault:
        raise ActionError(str(fault), hint=fault.options.get("hint")) from None
    word = red("bye") if context.bool_flag("bye") else green("hello")
    for _ in range(times):
        print(word, *context.args)


if __name__ == '__main__':
    app.run()
