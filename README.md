# triviaquiz

A trivia quiz game for several players at once. A server holds the themes,
questions and scoreboards, and players join from a terminal client over TCP.
The game's messages are in Italian.

## Quiz data

The server reads its quiz from a data directory (`dati` in the current
directory unless `--data-dir` says otherwise):

- `indice.txt`: the first line is the number of themes, each further line is
  the name of one theme.
- `1.txt`, `2.txt`, ...: one file per theme, in the order of `indice.txt`.
  Each line holds a question and its accepted answers:

  ```
  Qual è la capitale d'Italia?|roma~rome
  ```

  The question comes before `|` and the accepted answers are separated by
  `~`. A player's answer is turned to lower case before it is compared, so
  the accepted answers should be written in lower case. Only the first five
  lines of a theme file are used, and a file with fewer than five lines is
  an error.

If the data cannot be loaded, `triviaquiz-server` prints the error and exits
with status 1.

## Running

Start the server:

```
triviaquiz-server
triviaquiz-server --data-dir path/to/dati --port 6000
```

It listens on every interface, on port 6000 by default, and refreshes a
status screen showing the themes, the active players, every theme's
scoreboard and who has completed each theme. SIGINT (and SIGHUP where the
platform has it) stops it.

Start a client in another terminal, giving the server's port:

```
triviaquiz-client 6000
```

The client shows a menu (1 to start a session, 2 to quit), asks for a unique
nickname, lists the themes not yet played, and asks the five questions of
the chosen theme one by one, telling the player after each whether the
answer was right. Each correct answer is worth one point on that theme's
scoreboard. Input lines are limited to 39 characters; longer lines are cut,
and empty lines are ignored.

## Commands

While choosing a theme, answering a question, or after every theme has been
played, a player can type:

- `show score`: shows every theme's scoreboard, highest score first.
- `endquiz`: ends the session. The player's scores and completions are
  removed and the client returns to its main menu.

A nickname stays taken for as long as the server runs, even after its
player has left.

## Library use

The pieces can be used on their own:

- `triviaquiz.quiz.load_quiz(data_dir)` returns a `Quiz` of `Theme`s and
  `Question`s; `Question.is_correct(answer)` checks an answer.
- `triviaquiz.game.Game` holds the shared state; `handle_player(game, sock,
  output)` runs one player's session over a connected socket.
- `triviaquiz.server.create_server_socket(host, port, backlog)` and
  `serve(game, server_socket, output)` accept players, one thread each.
- `triviaquiz.client.run_session(sock, input_stream, output)` plays one
  session against a connected server.
- `triviaquiz.protocol` sends and receives messages framed by a 32-bit
  big-endian length.

## Limitations

- Players, scores and completions live in memory only and are lost when the
  server stops.
- The client always connects to 127.0.0.1; only the port can be chosen.
- Traffic is plain TCP, with no encryption or authentication.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```