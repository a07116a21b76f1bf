import logging
import pathlib

from argosy import *

__prog__ = "demo"

app = Dispatcher(
    "demo",
    pathlib.Path(__file__).with_name("targets"),
    shell=True,
    colorful=True,
)


@app.flag("v", "verbose", "print debug traces of the dispatcher", 0)
def verbose():
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@app.target("greet", descr="greet somebody")
def greet(context):
    context.add_argument("who", "string", "who to greet")

    shout = False

    def loud():
        nonlocal shout
        shout = True

    context.add_flag("l", "loud", "greet in capitals", 1, callback=loud)

    def handler(who):
        message = "hello, %s" % who
        app.console.print(message.upper() if shout else message)
    return handler


if __name__ == '__main__':
    invoke(app)
