"""Reading, filtering, trimming, correcting and reporting on FASTQ sequencing reads."""

__version__ = "0.1.0"