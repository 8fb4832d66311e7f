from siamese_db.pairs.generate import generate_pairs, write_pair_file
from siamese_db.pairs.reader import PairFileReader, read_pair_specs

__all__ = ["PairFileReader", "read_pair_specs", "generate_pairs", "write_pair_file"]
