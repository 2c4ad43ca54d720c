"""U.S. public debt ("Debt to the Penny") dataset + live counter.

- Three concurrent FiscalData reads: latest day, previous day, 30-day window
- Day-over-day change and a linear per-second rate
- Per-capita / per-taxpayer framing, static placeholder KPIs
- A cancellable ticker that interpolates the headline between refreshes
"""
