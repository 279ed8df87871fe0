"""Servicios del Core: parser, generador de candidatos, resolver y rewriter.

Nada aquí hace I/O directo: el único punto asíncrono (el probe) entra por
`core.interfaces.prober.ReachabilityProber`.
"""
