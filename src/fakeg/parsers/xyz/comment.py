from fakeg.parsers.base import is_int_token


def infer_charge_spin(comment: str) -> tuple[int, int] | None:
    """Read 'charge multiplicity' from a comment such as '0 1'.

    Only a line of exactly two integer tokens qualifies; '0.0 1' or '0 1 x' do not.
    """
    tokens = comment.strip().split()
    if len(tokens) != 2 or not all(is_int_token(t) for t in tokens):
        return None
    return int(tokens[0]), int(tokens[1])
