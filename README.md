# gizmos

A collection of small, self-contained tools in plain Python with no
third-party dependencies:

- **A Redis-compatible server** (`gizmos.redis`): RESP encoding and decoding,
  an in-memory cache with key expiry, and a single-threaded, selector-driven
  TCP server that answers `PING`, `ECHO`, `SET` (with `EX`/`PX`/`EXAT`/`PXAT`),
  `GET`, `EXISTS`, `DEL`, `INCR`, `DECR`, `TTL`, `LPUSH`, `RPUSH`, `LRANGE`
  and `LLEN`.
- **Code 128 barcodes** (`gizmos.barcode`): picks the shortest mix of code
  sets A, B and C for a message and writes the bars as a binary PBM image.
- **Sudoku** (`gizmos.sudoku`): solves a puzzle, reporting invalid or
  ambiguous ones, or generates a new puzzle with a unique solution.
- **Word search** (`gizmos.wordsearch`): generates a puzzle from a word list
  or solves a given grid.
- **Minesweeper** (`gizmos.minesweeper`): the game state and a coloured text
  rendering of the board.
- **A static file HTTP server** (`gizmos.httpserver`) backed by a small
  thread pool (`gizmos.threadpool`).
- **A hello-world socket server and client** (`gizmos.hellosocket`).

## Installation

```
pip install .
```

Python 3.10 or newer is required.

## Command-line tools

### Redis-compatible server

```
gizmos-redis-server [--host HOST] [--port PORT]
```

Listens on `0.0.0.0:6379` unless told otherwise. Any Redis client can talk
to it:

```
redis-cli set greeting hello ex 60
redis-cli get greeting
redis-cli rpush items a b c
redis-cli lrange items 0 -1
```

Unknown commands get the error reply `Not supported`; malformed requests get
`Invalid input`. Stop the server with Ctrl+C. Data lives in memory only and
is lost when the server stops.

### Barcodes

```
gizmos-barcode message.txt barcode.pbm
```

Reads the message (at most 128 characters; lines are joined with newlines)
from the input file and writes a Code 128 barcode as a PBM image, 5 pixels
per module, 150 pixels high, with a 10-module quiet zone on each side.

### Sudoku

```
gizmos-sudoku              # print a freshly generated puzzle
gizmos-sudoku puzzle.txt   # solve the puzzle in puzzle.txt
```

The puzzle file holds 81 cells, digits for given values and `.` for blanks;
every other character is ignored, so the layout is up to you. A puzzle with
no solution prints `Error: Invalid Sudoku.`, one with several prints
`Error: Multiple solutions exist.`

### Word search

```
gizmos-wordsearch words.txt            # generate a puzzle from the word list
gizmos-wordsearch words.txt grid.txt   # solve a grid
```

The word list is whitespace-separated words; use upper case, since generated
grids are padded with random upper-case letters. A grid file has one row per
line; spaces between letters are optional, and rows of different lengths are
rejected. When solving, the tool prints how many words were found (`F`) and
not found (`NF`), then the grid with every letter that is not part of a found
word replaced by `*`.

### Static file server

```
gizmos-http-server 8000 .
```

Serves the files under the given directory over HTTP `GET` as `text/plain`,
logging one line per request. Query strings are ignored. Missing files and
paths that point outside the directory get `404 Not Found`; other methods get
`405 Method Not Allowed`. At most ten requests are handled at once.

### Hello socket

```
gizmos-hello-socket server 127.0.0.1 9000
gizmos-hello-socket client 127.0.0.1 9000
```

The client sends `Hello Socket!`, waits five seconds and prints the reply;
the server prints what it received and answers `Bye Socket!`.

## Library use

### RESP nodes, the cache and commands

```python
from gizmos.redis.node import AggregateNode, PlainNode, VariantNode, deserialize
from gizmos.redis.cache import Cache
from gizmos.redis.commands import handle_request

VariantNode("hello").serialize()            # '$5\r\nhello\r\n'
VariantNode(None).serialize()               # '$-1\r\n'
PlainNode("OK", True).serialize()           # '+OK\r\n'
PlainNode("oops", False).serialize()        # '-oops\r\n'

request = AggregateNode([VariantNode("get"), VariantNode("key")])
request.serialize()                         # '*2\r\n$3\r\nget\r\n$3\r\nkey\r\n'
deserialize("*1\r\n$4\r\nping\r\n").serialize()

cache = Cache()
cache.set("session", VariantNode("value"))
cache.expire_in_millis("session", 500)
cache.ttl("session")                        # milliseconds left, -1 without expiry, -2 if missing

handle_request("*1\r\n$4\r\nping\r\n", cache)   # '+PONG\r\n'
```

`gizmos.redis.server` provides `RequestReader`, which collects received text
until it holds one complete RESP value, and `RedisServer`, whose
`serve_forever()` runs until `shutdown()` is called.

### Barcodes

```python
from gizmos.barcode import BarcodeError, encode, to_pbm, write_pbm

bits = encode("Hello 12345")        # list of bools, True for a dark module
image = to_pbm(bits)                # PBM bytes
write_pbm(bits, "hello.pbm", 5, 150, 10)
```

`encode` raises `BarcodeError` for characters outside Code 128.

### Puzzles and games

```python
from gizmos.sudoku import Sudoku, SudokuError, format_board, parse_board
from gizmos.wordsearch import WordSearch
from gizmos.minesweeper import Minesweeper, render

puzzle = Sudoku().generate()               # 9x9 list of '1'..'9' and '.'
print(format_board(Sudoku(puzzle).solve()))

search = WordSearch(["CAT", "DOG"])
search.generate()
print(search.render())
found = search.solve()                     # {'CAT', 'DOG'}

game = Minesweeper(9, 9, 10)
game.click(4, 4, True, False, True)        # left click, released
print(render(game))
```

`Sudoku`, `WordSearch` and `Minesweeper` accept a `random.Random` as `rng`
for repeatable results.

### Thread pool

```python
from gizmos.threadpool import ThreadPool

with ThreadPool(4) as pool:
    pool.submit(lambda: print("working"))
```

Leaving the `with` block waits until every queued task has run.

## What is not included

Minesweeper has no command and no interactive screen: the package holds the
game state, click handling and `render()`, which returns the board as
coloured terminal text, but nothing that reads the mouse or keyboard and runs
a game loop.

## Running the tests

```
pip install .[test]
pytest
```