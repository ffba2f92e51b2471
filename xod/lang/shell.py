"""Handles interactive/command-line mode for xod interpreter. Uses cmd as backend."""

import cmd

from xod.lang.error import XodException


class Shell(cmd.Cmd):
    """Bitwise expression interpreter shell."""
    intro = "xod: bitwise expression interpreter\nType 'help' for more information, 'exit' to leave."
    prompt = ">> "
    secondary_prompt = ".. "  # used for line continuations
    _tmp_prompt = ">> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary xod statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            exprs = [(self._tmp_line, self.line_num)] if self._tmp_line else []
            line, add_to_prev = self.sess.preprocess_line(line, self.line_num, bool(self._tmp_line), exprs)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                if line:
                    result = self.sess.evaluate_line(line, self.line_num)
                    if result:
                        print(result)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the xod interpreter!\n\n"
              "xod evaluates unsigned integer expressions. Literals can be decimal, hex (0xff), octal (0o17)\n"
              "or binary (0b101). There is no operator precedence: 'a & b | c' is refused, write\n"
              "'(a & b) | c' instead. hex(), bin() and oct() print values in other bases.\n\n"
              "Try it out by typing 'x = 0xf0', then 'bin(x >> 4)'. Blocks look like\n"
              "'for(i in range(0, 4)) { bin(1 << i) }'.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter. Accepts 'exit' and 'exit()'."""
        if arg.strip() not in ("", "()"):
            with self.sess.error_handler:
                raise XodException("unrecognized argument '{}' to exit", arg.strip(), diagnosis=False)
            return False
        return True

    do_quit = do_exit
