"""Kaldi Codec: binary codec for Kaldi archives, script files and nnet2 models.

WHY: Speech-recognition toolkits exchange features and models as Kaldi
binary files: archives ("ark") of keyed matrices and vectors, script
files ("scp") pointing into archives or at commands, and acoustic-model
files holding a transition model plus a neural network. Python tooling
needs to read and write these without shelling out to Kaldi binaries.

HOW: Three layers: primitive decoding (tokens, sized ints/floats,
typed vectors), record codecs (matrices, compressed matrices, int
vectors, tagged arrays) and structured loaders (archive/script streams,
transition model, HMM topology, nnet2 component graph). Each layer is
independently testable.

RULES:
- Binary encoding only; text-mode Kaldi files are rejected
- Decoding is strictly forward-only and pull-based (generators)
- Nnet components are resolved through the static COMPONENTS table
"""

__version__ = "0.1.0"
