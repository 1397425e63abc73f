"""Timeline transactions, activity log, detail responses, normalizers and type resolution."""