"""D2Q9 BGK lattice Boltzmann simulation on a periodic grid."""

__version__ = "1.0.0"
