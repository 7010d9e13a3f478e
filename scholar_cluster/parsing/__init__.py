from .corpus_parser import ParsedCorpus, iter_papers, parse_file, parse_lines

__all__ = ["ParsedCorpus", "iter_papers", "parse_file", "parse_lines"]
