"""
Schema compilers.

Only Prisma is supported; the compiler reads a complete registry and
returns schema text.
"""

from .prisma import CompiledSchema, PrismaSchemaCompiler

__all__ = ["CompiledSchema", "PrismaSchemaCompiler"]
