import os

# charts are written to files only; keep pyplot off any display backend
os.environ.setdefault("MPLBACKEND", "Agg")
