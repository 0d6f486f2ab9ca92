import sys


def join_lines(lines):
    return "".join(line + "\n" for line in lines)


def unique_list(xs):
    return list(dict.fromkeys(xs))


def print_error(*objects, sep=" ", end="\n"):
    print(*objects, sep=sep, end=end, file=sys.stderr)
