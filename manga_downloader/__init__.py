"""Скачивание манги в PDF-файлы пачками глав"""
