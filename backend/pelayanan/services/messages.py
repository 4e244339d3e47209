"""Notification texts for status changes, shared by the WhatsApp and email channels."""

from pelayanan.models.enums import SubmissionStatus
from pelayanan.models.submission import Submission

STATUS_LABELS = {
    SubmissionStatus.PENGAJUAN_BARU: "Pengajuan Baru",
    SubmissionStatus.DIPROSES: "Sedang Diproses",
    SubmissionStatus.SELESAI: "Selesai",
    SubmissionStatus.DITOLAK: "Ditolak",
}

STATUS_NOTES = {
    SubmissionStatus.PENGAJUAN_BARU: "Pengajuan Anda telah kami terima dan menunggu verifikasi.",
    SubmissionStatus.DIPROSES: "Pengajuan Anda sedang diproses oleh petugas kami.",
    SubmissionStatus.SELESAI: "Pengajuan Anda telah selesai diproses.",
    SubmissionStatus.DITOLAK: (
        "Mohon maaf, pengajuan Anda tidak dapat kami proses. "
        "Silakan hubungi petugas layanan untuk informasi lebih lanjut."
    ),
}


def status_label(status: SubmissionStatus) -> str:
    return STATUS_LABELS[status]


def build_status_message(
    submission: Submission,
    new_status: SubmissionStatus,
    tracking_url: str = "",
) -> str:
    lines = [
        f"Halo {submission.nama},",
        "",
        f"Status pengajuan {submission.jenis_layanan} Anda telah diperbarui.",
        "",
        f"Kode tracking : {submission.tracking_code}",
        f"Status        : {status_label(new_status)}",
        "",
        STATUS_NOTES[new_status],
    ]
    if tracking_url:
        lines.extend(["", f"Cek status pengajuan: {tracking_url.rstrip('/')}/{submission.tracking_code}"])
    lines.extend(["", "Terima kasih."])
    return "\n".join(lines)


def build_email_subject(submission: Submission, new_status: SubmissionStatus) -> str:
    return f"[{submission.tracking_code}] Status pengajuan: {status_label(new_status)}"
