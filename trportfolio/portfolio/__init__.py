"""Instruments, documents, transactions, their builders, processors and handlers."""