"""Package entry point for ``python -m kaldi_codec``.

Delegates to the CLI's main() function.
"""

from kaldi_codec.cli import main

if __name__ == "__main__":
    main()
