from typing import List

from toksave.models.record import CanonicalVideoRecord
from toksave.models.response import DownloadLink
from toksave.utils.filename import download_filename


def build_download_links(record: CanonicalVideoRecord) -> List[DownloadLink]:
    """Direct links for the download buttons, best variant first"""
    links = [
        DownloadLink(
            kind="no_watermark",
            url=record.play_url,
            filename=download_filename(record.id, "no_wm", "mp4"),
        ),
        DownloadLink(
            kind="watermarked",
            url=record.watermarked_play_url,
            filename=download_filename(record.id, "wm", "mp4"),
        ),
    ]

    if record.track.url:
        links.append(DownloadLink(
            kind="audio",
            url=record.track.url,
            filename=download_filename(record.id, "audio", "mp3"),
        ))

    return links
