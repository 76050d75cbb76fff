"""Report Rendering - turns attendance report rows into xlsx, pdf and csv bytes.

Invariants:
    - Renderers are synchronous and side-effect free (bytes in memory, no files)
    - Every renderer accepts the same ReportTable structure
"""
