from booktop.main import main

main()
