"""
User-facing distribution messages (Malay, as shown to school staff)
"""

EXPORT_SUCCESS = "PDF Berjaya Dimuat Turun!"
EXPORT_FAILED = "Ralat semasa menjana PDF."

SYNC_SUCCESS = "Berjaya! Data disimpan ke Google Sheet & Drive."
SYNC_FAILED = "Ralat semasa proses penyimpanan."
SYNC_NOT_CONFIGURED = "Pautan Google Sheet & Drive belum dikonfigurasi."

SHARE_SUCCESS = "Pautan disalin ke clipboard!"
SHARE_FAILED = "Ralat semasa menjana pautan perkongsian."
SHARE_DETAIL = "Pautan PDF Dijana & Disalin!\n\nURL: {url}\n\n{caveat}"
SHARE_CAVEAT = (
    "Nota: Pautan ini adalah fail sementara sesi ini dan hanya boleh dibuka "
    "pada komputer ini selagi sesi masih aktif."
)

BUSY = "Sila tunggu, proses sebelumnya masih berjalan."
